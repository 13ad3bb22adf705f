"""Web UI for browsing inventory and printing asset labels."""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any, Mapping

from dotenv import load_dotenv
from flask import (
    Flask,
    Response,
    after_this_request,
    redirect,
    render_template,
    request,
    send_file,
    url_for,
)
from markupsafe import Markup
from werkzeug.datastructures import ImmutableMultiDict

from domain_data import SORTABLE_FIELDS, filter_items, parse_sort_params, sort_items
from inventory_store import InventoryError, InventoryStore
from label_templates import get_template, list_templates
from label_templates.label_data import build_label_records, preview_record
from label_templates.label_generation import render_pdf
from label_templates.label_types import LabelRecord, LabelSettings
from label_templates.printing import (
    DIRECT_PRINT,
    PAGINATED_EXPORT,
    LayoutProfile,
    compose,
    template_css,
)
from label_templates.render import label_markup, render_with_settings
from spreadsheet_import import ImportFormatError, csv_template, import_items

__all__ = ["run_web_app", "create_app", "create_app_from_env"]

_TRUE_VALUES = {"1", "true", "yes", "on"}


def parse_label_settings(values: Mapping[str, Any]) -> LabelSettings:
    """Read label settings from submitted form or query values.

    Include flags default to on until the settings form itself is submitted.
    """

    template = get_template(values.get("template")).id
    if not values.get("settings_submitted"):
        return LabelSettings(template=template)

    def _flag(name: str) -> bool:
        return str(values.get(name) or "").lower() in _TRUE_VALUES

    return LabelSettings(
        template=template,
        include_qr=_flag("include_qr"),
        include_location=_flag("include_location"),
        include_date=_flag("include_date"),
    )


def _parse_selected_ids(form: ImmutableMultiDict[str, str]) -> list[int]:
    """Return selected item ids in submission order, without duplicates."""

    ids: list[int] = []
    seen: set[int] = set()
    for raw in form.getlist("item_id"):
        try:
            item_id = int(raw)
        except (TypeError, ValueError):
            continue
        if item_id in seen:
            continue
        seen.add(item_id)
        ids.append(item_id)
    return ids


def _optional_int(value: str | None) -> int | None:
    try:
        return int(value) if value else None
    except ValueError:
        return None


def create_app(store: InventoryStore) -> Flask:
    """Create the Flask app wired to the provided inventory store."""
    template_dir = Path(__file__).resolve().parent / "templates"
    app = Flask(__name__, template_folder=str(template_dir))
    app.config["SECRET_KEY"] = os.getenv(
        "FLASK_SECRET_KEY", "asset-labels-ui")

    template_choices = list_templates()
    sizing_css = Markup(template_css(template_choices))

    @app.context_processor
    def inject_template_css() -> dict[str, Markup]:  # pyright: ignore[reportUnusedFunction]
        return {"template_css": sizing_css}

    def _build_sort_links(
        sort_field: str,
        sort_direction: str,
        **extra_params: str,
    ) -> dict[str, str]:
        links: dict[str, str] = {}
        for field in SORTABLE_FIELDS:
            next_direction = "desc" if (
                field == sort_field and sort_direction == "asc") else "asc"
            params: dict[str, Any] = {
                "sort": field,
                "direction": next_direction,
                **{k: v for k, v in extra_params.items() if v},
            }
            links[field] = url_for("items_index", **params)
        return links

    def _records_for(item_ids: list[int], settings: LabelSettings) -> list[LabelRecord]:
        items = store.items_by_ids(item_ids)
        return build_label_records(items, settings, store.location_name)

    def _render_items_page(
        import_errors: list[str] | None = None,
        status: int = 200,
    ) -> tuple[str, int]:
        query = (request.args.get("q") or "").strip()
        category = (request.args.get("category") or "").strip()
        status_filter = (request.args.get("status") or "").strip()
        floor_id = _optional_int(request.args.get("floor"))

        items = filter_items(
            store.list_items(),
            query=query,
            category=category,
            floor_id=floor_id,
            status=status_filter,
        )
        sort_field, sort_direction = parse_sort_params(
            request.args.get("sort"), request.args.get("direction"))
        items = sort_items(items, sort_field, sort_direction)

        rows = [
            {
                "id": item.id,
                "code": item.code,
                "name": item.name,
                "category": item.category,
                "location": store.location_name(item.floor_id, item.room_id),
                "status": item.status,
                "value": item.value,
            }
            for item in items
        ]

        error_key = request.args.get("error")
        error_message = None
        if error_key == "no-selection":
            error_message = "Selecione ao menos um item antes de gerar etiquetas."
        elif error_key == "generation":
            error_message = (
                request.args.get("message")
                or "Não foi possível gerar as etiquetas selecionadas."
            )
        elif error_key == "import":
            error_message = request.args.get("message") or "Falha na importação."

        imported = _optional_int(request.args.get("imported"))

        return render_template(
            "items.html",
            items=rows,
            error=error_message,
            import_errors=import_errors or [],
            imported=imported,
            categories=store.categories(),
            floors=store.list_floors(),
            filters={
                "q": query,
                "category": category,
                "floor": floor_id,
                "status": status_filter,
            },
            sort_field=sort_field,
            sort_direction=sort_direction,
            sort_links=_build_sort_links(
                sort_field,
                sort_direction,
                q=query,
                category=category,
                status=status_filter,
                floor=str(floor_id) if floor_id is not None else "",
            ),
        ), status

    @app.route("/", methods=["GET"])
    def index() -> Response:  # pyright: ignore[reportUnusedFunction]
        return redirect(url_for("items_index"))

    @app.route("/items", methods=["GET"])
    def items_index() -> tuple[str, int]:  # pyright: ignore[reportUnusedFunction]
        return _render_items_page()

    @app.route("/labels/choose", methods=["POST"])
    def labels_choose() -> Response | str:  # pyright: ignore[reportUnusedFunction]
        selected_ids = _parse_selected_ids(request.form)
        if not selected_ids:
            return redirect(url_for("items_index", error="no-selection"))

        settings = parse_label_settings(request.form)
        records = _records_for(selected_ids, settings)
        if not records:
            return redirect(
                url_for(
                    "items_index",
                    error="generation",
                    message="Nenhum dos itens selecionados foi encontrado.",
                )
            )

        cells = [label_markup(render_with_settings(record, settings)) for record in records]
        return render_template(
            "labels.html",
            cells=cells,
            item_ids=selected_ids,
            settings=settings,
            template_choices=template_choices,
            active_template=get_template(settings.template),
            preview=False,
        )

    @app.route("/labels/preview", methods=["GET"])
    def labels_preview() -> str:  # pyright: ignore[reportUnusedFunction]
        settings = parse_label_settings(request.args)
        record = preview_record(settings)
        return render_template(
            "labels.html",
            cells=[label_markup(render_with_settings(record, settings))],
            item_ids=[],
            settings=settings,
            template_choices=template_choices,
            active_template=get_template(settings.template),
            preview=True,
        )

    def _compose_response(profile: LayoutProfile) -> Response:
        selected_ids = _parse_selected_ids(request.form)
        if not selected_ids:
            return redirect(url_for("items_index", error="no-selection"))
        settings = parse_label_settings(request.form)
        records = _records_for(selected_ids, settings)
        document = compose(
            records,
            settings.template,
            profile,
            include_qr=settings.include_qr,
            include_location=settings.include_location,
            include_date=settings.include_date,
        )
        return Response(document, mimetype="text/html")

    @app.route("/labels/print", methods=["POST"])
    def labels_print() -> Response:  # pyright: ignore[reportUnusedFunction]
        return _compose_response(DIRECT_PRINT)

    @app.route("/labels/export", methods=["POST"])
    def labels_export() -> Response:  # pyright: ignore[reportUnusedFunction]
        return _compose_response(PAGINATED_EXPORT)

    @app.route("/labels/pdf", methods=["POST"])
    def labels_pdf() -> Response:  # pyright: ignore[reportUnusedFunction]
        selected_ids = _parse_selected_ids(request.form)
        if not selected_ids:
            return redirect(url_for("items_index", error="no-selection"))
        settings = parse_label_settings(request.form)
        records = _records_for(selected_ids, settings)
        skip_labels = _optional_int(request.form.get("skip")) or 0

        tmp_file = NamedTemporaryFile(delete=False, suffix=".pdf")
        tmp_file.close()
        try:
            render_pdf(
                tmp_file.name,
                records,
                settings.template,
                include_qr=settings.include_qr,
                include_location=settings.include_location,
                include_date=settings.include_date,
                skip=max(skip_labels, 0),
            )
        except Exception as exc:  # pragma: no cover
            app.logger.exception("PDF generation failed")
            os.remove(tmp_file.name)
            return redirect(url_for("items_index", error="generation", message=str(exc)))

        @after_this_request
        # pyright: ignore[reportUnusedFunction]
        def cleanup_pdf(response: Response):
            try:
                os.remove(tmp_file.name)
            except OSError:
                pass
            return response

        return send_file(
            tmp_file.name,
            mimetype="application/pdf",
            as_attachment=True,
            download_name="etiquetas.pdf",
        )

    @app.route("/import/template.csv", methods=["GET"])
    def import_template() -> Response:  # pyright: ignore[reportUnusedFunction]
        return Response(
            csv_template(),
            mimetype="text/csv",
            headers={
                "Content-Disposition": "attachment; filename=modelo_importacao.csv"
            },
        )

    @app.route("/import", methods=["POST"])
    def import_upload() -> Response | tuple[str, int]:  # pyright: ignore[reportUnusedFunction]
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            return redirect(
                url_for("items_index", error="import", message="Nenhum arquivo enviado.")
            )
        try:
            result = import_items(store, upload.filename, upload.stream)
        except (ImportFormatError, InventoryError) as exc:
            return redirect(url_for("items_index", error="import", message=str(exc)))

        if not result.ok:
            return _render_items_page(import_errors=result.errors, status=400)
        return redirect(url_for("items_index", imported=result.created))

    return app


def load_store_from_env() -> InventoryStore:
    data_file = os.getenv("ASSET_LABELS_DATA_FILE", "").strip()
    if data_file:
        return InventoryStore.from_json_file(data_file)
    return InventoryStore()


def create_app_from_env() -> Flask:
    """Create the Flask app using ASSET_LABELS_* environment variables."""
    load_dotenv()
    return create_app(load_store_from_env())


def run_web_app(
    store: InventoryStore,
    host: str,
    port: int,
) -> None:
    """Launch a lightweight Flask app for interactive label selection."""
    app = create_app(store)

    use_reloader_env = os.getenv("USE_RELOADER")
    use_reloader = (
        str(use_reloader_env).lower() in _TRUE_VALUES
        if use_reloader_env is not None
        else True
    )
    app.run(host=host, port=port, debug=False, use_reloader=use_reloader)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for the web UI."""
    parser = argparse.ArgumentParser(
        description="Asset label generator web UI"
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host/IP for the web UI (default: 127.0.0.1).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=4000,
        help="Port for the web UI (default: 4000).",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=os.getenv("ASSET_LABELS_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    try:
        store = load_store_from_env()
    except InventoryError as exc:
        raise SystemExit(str(exc)) from exc

    run_web_app(
        store=store,
        host=args.host,
        port=args.port,
    )
    return 0


if __name__ == "__main__":
    load_dotenv()
    main()
