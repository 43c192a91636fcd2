from smrutimap import create_app
from smrutimap.config import DevelopmentConfig

if __name__ == '__main__':
    app = create_app(DevelopmentConfig)
    app.run(host='0.0.0.0', port=app.config["PORT"], debug=True)
