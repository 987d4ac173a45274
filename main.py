import sys
import logging

import config


def main():
    """Resolves the record directory and serves the character store."""
    try:
        directory = config.get_characters_dir()
    except RuntimeError as e:
        # Nothing works without a storage location
        logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
        logging.critical("Cannot start: %s", e)
        sys.exit(1)

    # Importing web_app configures logging and binds the store
    import web_app

    web_app.init_store(directory)
    print(f"Character records: {directory}")
    web_app.app.run(host=config.WEB_HOST, port=config.WEB_PORT)


if __name__ == "__main__":
    main()
