# run.py
from api import create_app
import os

app = create_app()

# Only used for 'python run.py' during local development; deploy behind a WSGI server
if __name__ == '__main__':
    port = int(os.environ.get('PORT', 3000))
    app.run(host='0.0.0.0', port=port, debug=app.config['ENVIRONMENT'] == 'development')
