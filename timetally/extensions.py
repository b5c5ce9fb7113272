from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager

db = SQLAlchemy()
migrate = Migrate()
# admin portal sessions; managers and employees are scoped in acl.py
login_manager = LoginManager()
login_manager.session_protection = "basic"
