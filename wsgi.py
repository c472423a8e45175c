# wsgi.py
# Entry point for gunicorn and the flask CLI (FLASK_APP=wsgi)

import os
from config import config
from mindquest import create_app

app = create_app(config[os.environ.get('FLASK_ENV', 'default')])
