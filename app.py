"""
Image Gallery
Application Entry Point

This file serves as the entry point for the Flask application.
It uses the application factory pattern defined in the gallery package.
"""

import logging

from gallery import create_app
from gallery.config import Config

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# Create the Flask application using the factory
app = create_app()

if __name__ == '__main__':
    app.run(debug=not Config.IS_PRODUCTION, host='0.0.0.0', port=5000)
