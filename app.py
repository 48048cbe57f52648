# Main Flask app
import logging
import os

from flask import Flask, jsonify

from config import config
from errors import register_error_handlers
from extensions import bcrypt, jwt
from models import db, User
from routes import auth_bp, comments_bp, main_bp, posts_bp, upload_bp, users_bp


def _unauthorized(message):
    return jsonify({"success": False, "message": message}), 401


def register_jwt_callbacks():
    @jwt.user_lookup_loader
    def load_user(_jwt_header, jwt_data):
        return db.session.get(User, int(jwt_data["sub"]))

    @jwt.user_lookup_error_loader
    def user_not_found(_jwt_header, _jwt_data):
        return _unauthorized('Token is not valid')

    @jwt.unauthorized_loader
    def missing_token(_reason):
        return _unauthorized('No token, authorization denied')

    @jwt.invalid_token_loader
    def invalid_token(_reason):
        return _unauthorized('Token is not valid')

    @jwt.expired_token_loader
    def expired_token(_jwt_header, _jwt_payload):
        return _unauthorized('Token has expired')


def create_app(config_name=None):
    config_name = config_name or os.environ.get('APP_CONFIG', 'default')
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    logging.basicConfig(level=app.config['LOG_LEVEL'])
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)
    bcrypt.init_app(app)
    jwt.init_app(app)

    # Register blueprints
    app.register_blueprint(main_bp, url_prefix='/')
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(posts_bp, url_prefix='/posts')
    app.register_blueprint(comments_bp, url_prefix='/comments')
    app.register_blueprint(users_bp, url_prefix='/users')
    app.register_blueprint(upload_bp, url_prefix='/upload')

    register_error_handlers(app)
    register_jwt_callbacks()

    with app.app_context():
        db.create_all()

    app.logger.info("App created with %s config", config_name)
    return app


if __name__ == '__main__':
    create_app().run(host='0.0.0.0', port=int(os.environ.get('PORT', 5000)))
