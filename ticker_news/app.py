"""
Ticker News HTTP service.

Exposes the news lookup as a small Flask application. The browser client
POSTs ``{"ticker": "TSLA"}`` and receives ``{"news": [...], "cached": bool}``.
Run with ``python -m ticker_news.app`` or any WSGI server pointed at
``ticker_news.app:create_app()``.
"""

import datetime
import logging
import os
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from ticker_news.config import Settings, load_settings
from ticker_news.news_service import NewsService, TickerValidationError
from ticker_news.parsers.rss import GoogleNewsParser
from ticker_news.services.db import CacheStore
from ticker_news.services.llm import LLMService

logger = logging.getLogger(__name__)

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


def build_service(settings: Settings) -> NewsService:
    """Wires the parser, LLM service and cache from settings."""
    parser = GoogleNewsParser(
        feed_url=settings["feed_url"],
        user_agent=settings["user_agent"],
        timeout=settings["feed_timeout"],
    )
    llm = LLMService(
        settings["gemini_api_key"],
        model=settings["model"],
        timeout_ms=settings["llm_timeout_ms"],
    )
    cache = CacheStore(settings["gcp_project_id"], collection=settings["collection"])
    return NewsService(
        parser,
        llm,
        cache,
        freshness=datetime.timedelta(minutes=settings["freshness_minutes"]),
        max_articles=settings["max_articles"],
    )


def create_app(
    service: Optional[NewsService] = None, settings: Optional[Settings] = None
) -> Flask:
    """Application factory."""
    app = Flask(__name__)

    @app.after_request
    def add_allow_headers(response):
        # Hooks run in reverse order, so this overrides the flask-cors value
        response.headers["Access-Control-Allow-Headers"] = ", ".join(CORS_ALLOW_HEADERS)
        return response

    CORS(
        app,
        resources={r"/*": {"origins": "*"}},
        allow_headers=CORS_ALLOW_HEADERS,
        send_wildcard=True,
    )

    if service is None:
        service = build_service(settings or load_settings())
    app.config["NEWS_SERVICE"] = service

    @app.route("/", methods=["POST", "OPTIONS"])
    @app.route("/fetch-news", methods=["POST", "OPTIONS"])
    def fetch_news():
        if request.method == "OPTIONS":
            return "", 200

        try:
            payload = request.get_json(silent=True)
            ticker = payload.get("ticker") if isinstance(payload, dict) else None
            result = service.get_news(ticker)
        except TickerValidationError as e:
            return jsonify({"error": str(e)}), 400
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.exception("Error in fetch-news handler")
            return jsonify({"error": str(e) or "Unknown error occurred"}), 500

        return jsonify(result)

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok"})

    return app


def main():
    """Main execution entry point."""
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    app = create_app()
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", "8080")))


if __name__ == "__main__":
    main()
