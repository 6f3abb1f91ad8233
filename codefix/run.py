import os

from codefix import create_app
from codefix.config import config_by_name


def main():
    config_name = os.environ.get('FLASK_ENV', 'default')
    if config_name not in config_by_name:
        config_name = 'default'

    app = create_app(config_name)
    port = int(os.environ.get('PORT', 3000))
    app.run(debug=app.config['DEBUG'], port=port, host='0.0.0.0')


if __name__ == "__main__":
    main()
