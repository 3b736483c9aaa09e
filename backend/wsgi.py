from driverpunch import create_app

app = create_app()
