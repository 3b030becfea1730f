"""
Entry point to run the Deep Analyst backend with one command.

Usage:
    python main.py

Then, in a separate terminal:
    streamlit run ui_app.py
"""

import uvicorn

from deep_analyst.backend import app
from deep_analyst.config import configure_logging


if __name__ == "__main__":
    configure_logging()
    uvicorn.run(app, host="0.0.0.0", port=8000)
