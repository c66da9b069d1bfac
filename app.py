import os
import logging
from rich.logging import RichHandler
from flask import Flask, jsonify
from asgiref.wsgi import WsgiToAsgi

from feedback_analytics.models import init_db
from routes.analytics_routes import analytics_bp

# Configure rich logging
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)

logging.root.handlers = [
    RichHandler(rich_tracebacks=True, show_path=True, tracebacks_show_locals=False,
                log_time_format="[%b %d, %Y, %I:%M:%S %p]",
                )
]
logger = logging.getLogger("feedback_analytics")

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = 32 * 1024 * 1024  # 32MB max request body

# Register blueprints
app.register_blueprint(analytics_bp)

asgi_app = WsgiToAsgi(app)


@app.errorhandler(413)
def request_too_large(_error):
    return jsonify({
        "success": False,
        "message": "Request body too large"
    }), 413


if __name__ == "__main__":
    # Initialize database
    logger.info("Initializing database...")
    init_db()
    logger.info("Database initialized")

    import uvicorn
    host = os.environ.get("HOST", "127.0.0.1")
    port = int(os.environ.get("PORT", "5000"))
    logger.info(f"Starting server on {host}:{port}")
    uvicorn.run(asgi_app, host=host, port=port, log_config=None)
