"""
SEO Toolkit - On-page SEO scoring, optimization and monitoring
Main application entry point
"""

from seo_toolkit import create_app
import logging
import os

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create Flask app
app = create_app(os.environ.get('FLASK_ENV'))

if __name__ == '__main__':
    logger.info("Starting SEO Toolkit API")
    logger.info(f"Target website: {app.config['TARGET_WEBSITE']}")

    # Run the application
    app.run(
        debug=app.config['DEBUG'],
        host='0.0.0.0',
        port=app.config['PORT']
    )
