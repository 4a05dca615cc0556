import sys
import os

# Add your project directory to the sys.path
project_home = os.environ.get('MEAL_PLANNER_HOME', '/home/YOUR_USERNAME/meal-planner')
if project_home not in sys.path:
    sys.path.insert(0, project_home)

# Set the working directory
os.chdir(project_home)
os.environ.setdefault('FLASK_ENV', 'production')

# Import the Flask app
from app import app as application
