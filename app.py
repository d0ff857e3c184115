# app.py
"""Flask host: template storage and document rendering over HTTP."""
import io
import logging
from pathlib import Path

from flask import Flask, request, jsonify, send_file
from sqlalchemy.engine import make_url

from config import Config
from documents import DocumentData, DocumentDataError
from formatting import Formatter
from models import (
    Base, make_engine, make_session_factory,
    load_template_config, save_template_config,
)
from page_stream import PageGeometry
from pdf_service import document_filename, render, render_preview
from template_config import resolve

logger = logging.getLogger(__name__)


# -----------------------------
# Helpers
# -----------------------------
def _ensure_dirs(db_url: str):
    # SQLite won't create the folder holding its file
    url = make_url(db_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


def _error(status: int, *errors: str):
    return jsonify({"errors": list(errors)}), status


# -----------------------------
# App factory
# -----------------------------
def create_app(config=None):
    app = Flask(__name__)
    app.config.from_object(config or Config)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db_url = app.config["SQLALCHEMY_DATABASE_URI"]
    _ensure_dirs(db_url)
    engine = make_engine(db_url, echo=app.config.get("SQLALCHEMY_ECHO", False))
    Base.metadata.create_all(engine)

    SessionLocal = make_session_factory(engine)

    def db_session():
        return SessionLocal()

    def formatter_for(body: dict) -> Formatter:
        return Formatter(
            locale=body.get("locale") or app.config.get("DOCUMENT_LOCALE", "en-US"),
            currency=body.get("currency") or app.config.get("DOCUMENT_CURRENCY", "USD"),
        )

    def prepare(body):
        """(data, template, formatter) from a request body, or an error response."""
        if not isinstance(body, dict):
            return None, _error(400, "request body must be a JSON object")
        payload = dict(body)
        template = payload.pop("template", None)
        if template is not None and not isinstance(template, dict):
            return None, _error(400, "template must be a JSON object")

        try:
            data = DocumentData.from_dict(payload)
        except DocumentDataError as e:
            return None, _error(400, *e.problems)

        if template is None:
            owner = (request.args.get("owner") or "").strip()
            if owner:
                with db_session() as s:
                    template = load_template_config(s, owner)
        return (data, template, formatter_for(payload)), None

    def geometry() -> PageGeometry:
        return PageGeometry.for_page_size(app.config.get("PAGE_SIZE", "A4"))

    # -----------------------------
    # Health
    # -----------------------------
    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    # -----------------------------
    # Templates
    # -----------------------------
    @app.route("/templates/<owner>", methods=["GET"])
    def template_get(owner):
        with db_session() as s:
            return jsonify(load_template_config(s, owner))

    @app.route("/templates/<owner>", methods=["PUT"])
    def template_put(owner):
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            return _error(400, "template must be a JSON object")
        with db_session() as s:
            save_template_config(s, owner, body)
            s.commit()
        logger.info("Saved template for %s", owner)
        return jsonify(resolve(body).to_mapping())

    # -----------------------------
    # Documents
    # -----------------------------
    @app.route("/documents/render", methods=["POST"])
    def documents_render():
        prepared, err = prepare(request.get_json(silent=True))
        if err:
            return err
        data, template, fmt = prepared

        result = render(data, template, formatter=fmt, geometry=geometry())
        if not result.ok:
            return _error(422, *result.errors)

        resp = send_file(
            io.BytesIO(result.pdf_bytes),
            as_attachment=True,
            download_name=document_filename(data.kind, data.number, fmt.translator),
            mimetype="application/pdf",
        )
        resp.headers["X-Render-Warnings"] = str(len(result.warnings))
        return resp

    @app.route("/documents/preview", methods=["POST"])
    def documents_preview():
        prepared, err = prepare(request.get_json(silent=True))
        if err:
            return err
        data, template, fmt = prepared

        result = render_preview(data, template, formatter=fmt, geometry=geometry())
        if not result.ok:
            return _error(422, *result.errors)

        resp = send_file(
            io.BytesIO(result.pdf_bytes),
            as_attachment=False,
            download_name=document_filename(data.kind, data.number, fmt.translator),
            mimetype="application/pdf",
        )
        resp.headers["X-Render-Warnings"] = str(len(result.warnings))
        return resp

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True)
