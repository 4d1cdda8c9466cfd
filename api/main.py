"""Default process entry point.

Serves a fully public catalogue from local disk. Deployments with access
rules or remote storage build their own app with app_factory.create_app().
"""
from config import default_config
from logging_config import configure_logging
from app_factory import create_app
from handlers import LocalFileHandler, LocalRoCrateHandler
from transform import all_public_access_transformer, all_public_file_access_transformer

configure_logging(default_config.server.log_level)

storage = default_config.storage

app = create_app(
    access_transformer=all_public_access_transformer,
    file_access_transformer=all_public_file_access_transformer,
    file_handler=LocalFileHandler(storage.root, storage.accel_prefix),
    rocrate_handler=LocalRoCrateHandler(storage.root, storage.accel_prefix),
    config=default_config,
)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=default_config.server.host, port=default_config.server.port)
