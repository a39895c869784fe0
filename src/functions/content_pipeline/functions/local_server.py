import os
import sys

# Add the project root to the python path so imports work
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../../../..")))

from flask import Flask, request
from src.functions.content_pipeline.functions.main import (
    cleanup_stuck_content_handler,
    expire_content_handler,
    generate_audio_handler,
    generate_script_handler,
    pipeline_health_handler,
    shape_content_handler,
)

app = Flask(__name__)

ROUTES = {
    "shape-content": shape_content_handler,
    "generate-script": generate_script_handler,
    "generate-audio": generate_audio_handler,
    "cleanup-stuck-content": cleanup_stuck_content_handler,
    "expire-content": expire_content_handler,
    "pipeline-health": pipeline_health_handler,
}


@app.route("/<name>", methods=["GET", "POST", "OPTIONS"])
def dispatch(name):
    handler = ROUTES.get(name)
    if handler is None:
        return {"success": False, "error": f"Unknown function: {name}"}, 404
    return handler(request)


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "8080")), debug=True)
