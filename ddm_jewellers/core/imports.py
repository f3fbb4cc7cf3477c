from flask import Flask, request, jsonify, Blueprint, Response, current_app
from flask_jwt_extended import create_access_token, get_jwt_identity, jwt_required, JWTManager, get_jwt, verify_jwt_in_request
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import SQLAlchemyError
from flask_migrate import Migrate
from flask_bcrypt import Bcrypt
from flasgger import Swagger
from flask_mail import Mail, Message
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from markupsafe import escape
from sqlalchemy import func
from datetime import datetime, timedelta
from decimal import Decimal
import secrets
import requests
import cloudinary
import cloudinary.uploader
