pytest_plugins = ["refimage.pytest_plugin", "pytester"]
