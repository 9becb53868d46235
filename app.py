import logging
import re
from dataclasses import asdict
from datetime import datetime
from io import BytesIO

from flask import Flask, Response, abort, jsonify, render_template, request, send_file, url_for
from werkzeug.utils import secure_filename

from badges.barcode import encode_linear_visual, encode_qr
from badges.compositor import preview_badge, print_badge, render_badge
from badges.editor import LANDSCAPE, BadgeTheme
from badges.errors import AssemblyError, EncodingError, PrintError
from badges.pdf_generator import assemble_confirmation, confirmation_filename, generate_badge_sheet
from badges.raster import CairoRenderer, rasterize_or_none
from badges.store import GuestStore
from config import Config
from database_setup import init_db

logger = logging.getLogger(__name__)

# Barcode shown on the confirmation page and embedded in the PDF
CONFIRMATION_BARCODE = dict(height=80, show_text=True, font_size=14, margin=5)

COLOR_RE = re.compile(r"#[0-9a-fA-F]{3,6}")
QR_MIN_SIZE, QR_MAX_SIZE = 32, 1024


def _flag(value, default=True):
    if value is None:
        return default
    return value.lower() not in ("0", "false", "no", "off")


def _color(value, default):
    if value and COLOR_RE.fullmatch(value):
        return value
    return default


def _error(message, status):
    return jsonify({"status": "error", "message": message}), status


def create_app(store=None, renderer=None, config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config:
        app.config.update(config)

    if store is None:
        init_db(app.config["DB_FILE"])
        store = GuestStore(app.config["DB_FILE"])
    if renderer is None:
        renderer = CairoRenderer(scale=app.config["RASTER_SCALE"])

    def load_guest(guest_id):
        guest = store.get_guest(guest_id)
        if guest is None:
            abort(404)
        return guest

    # ---------------- Tokens ----------------
    @app.route("/guests/<guest_id>/qr.svg")
    def guest_qr(guest_id):
        guest = load_guest(guest_id)
        size = request.args.get("size", 200, type=int)
        size = min(max(size, QR_MIN_SIZE), QR_MAX_SIZE)
        svg = encode_qr(guest.id, size=size, error_correction=app.config["QR_ERROR_CORRECTION"])
        return Response(svg, mimetype="image/svg+xml")

    @app.route("/guests/<guest_id>/barcode.svg")
    def guest_barcode(guest_id):
        guest = load_guest(guest_id)
        return Response(encode_linear_visual(guest.id, **CONFIRMATION_BARCODE),
                        mimetype="image/svg+xml")

    @app.route("/guests/<guest_id>/barcode.png")
    async def guest_barcode_png(guest_id):
        guest = load_guest(guest_id)
        markup = renderer.to_vector_markup(guest.id, **CONFIRMATION_BARCODE)
        png = await rasterize_or_none(markup, renderer)
        name = f"badge-barcode-{guest.display_badge_id}"
        if png is None:
            return send_file(BytesIO(markup.encode("utf-8")), as_attachment=True,
                             mimetype="image/svg+xml", download_name=secure_filename(f"{name}.svg"))
        return send_file(BytesIO(png), as_attachment=True, mimetype="image/png",
                         download_name=secure_filename(f"{name}.png"))

    # ---------------- Confirmation ----------------
    @app.route("/guests/<guest_id>/confirmation.pdf")
    async def guest_confirmation(guest_id):
        guest = load_guest(guest_id)
        markup = renderer.to_vector_markup(guest.id, **CONFIRMATION_BARCODE)
        raster = await rasterize_or_none(markup, renderer)
        pdf = assemble_confirmation(guest, raster, brand=app.config["BRAND_NAME"])
        return send_file(BytesIO(pdf), as_attachment=True, mimetype="application/pdf",
                         download_name=secure_filename(confirmation_filename(guest)))

    # ---------------- Badges ----------------
    @app.route("/guests/<guest_id>/badge")
    def guest_badge(guest_id):
        guest = load_guest(guest_id)
        view = render_badge(guest, guest.event_name, logo_text=app.config["BADGE_LOGO_TEXT"])
        return render_template("badge.html", view=view,
                               print_url=url_for("print_guest_badge", guest_id=guest.id))

    @app.route("/guests/<guest_id>/badge/print", methods=["POST"])
    def print_guest_badge(guest_id):
        guest = load_guest(guest_id)
        view = render_badge(guest, guest.event_name, logo_text=app.config["BADGE_LOGO_TEXT"])
        spool = []
        print_badge(view, spool.append, on_print=lambda: store.mark_badge_printed([guest.id]))
        return send_file(BytesIO(spool[0]), mimetype="application/pdf",
                         download_name=secure_filename(f"badge-{guest.display_badge_id}.pdf"))

    @app.route("/events/<event_id>/badges/bulk", methods=["POST"])
    def bulk_print(event_id):
        data = request.get_json(silent=True) or {}
        guest_ids = data.get("guest_ids") or []
        if not guest_ids:
            return _error("Please select at least one guest to print badges.", 400)
        guests = store.list_guests(event_id, guest_ids)
        if not guests:
            return _error("No matching guests for this event", 404)

        logo_text = app.config["BADGE_LOGO_TEXT"]
        views = [render_badge(g, g.event_name, logo_text=logo_text) for g in guests]
        pdf = generate_badge_sheet(views, cols=app.config["SHEET_COLUMNS"],
                                   rows=app.config["SHEET_ROWS"])
        store.mark_badge_printed([g.id for g in guests])
        logger.info("Printed %d badges for event %s", len(guests), event_id)
        name = guests[0].event_name or event_id
        return send_file(BytesIO(pdf), as_attachment=True, mimetype="application/pdf",
                         download_name=secure_filename(f"{name.replace(' ', '_')}_badges.pdf"))

    @app.route("/events/<event_id>/badges/<badge_id>")
    def badge_lookup(event_id, badge_id):
        guest = store.get_guest_by_badge(event_id, badge_id) or store.get_guest(badge_id)
        if guest is None:
            return _error("Invalid badge", 404)
        return jsonify({"status": "success", "guest": asdict(guest),
                        "badge_printed": store.badge_printed(guest.id),
                        "check_in_time": store.check_in_time(guest.id)})

    @app.route("/events/<event_id>/badges/<badge_id>/check-in", methods=["POST"])
    def check_in(event_id, badge_id):
        guest = store.get_guest_by_badge(event_id, badge_id) or store.get_guest(badge_id)
        if guest is None:
            return _error("No guest found with this badge ID", 404)
        checked_in_at, already = store.check_in(guest.id)
        if already:
            at = datetime.fromisoformat(checked_in_at).strftime("%H:%M")
            return jsonify({"status": "error",
                            "message": f"{guest.full_name} has already checked in at {at}"})
        return jsonify({"status": "success", "message": f"{guest.full_name} has been checked in"})

    # ---------------- Template preview ----------------
    @app.route("/templates/preview/<preview_type>")
    def template_preview(preview_type):
        args = request.args
        defaults = BadgeTheme()
        theme = BadgeTheme(
            primary_color=_color(args.get("primary_color"), defaults.primary_color),
            text_color=_color(args.get("text_color"), defaults.text_color),
            font_size=args.get("font_size", defaults.font_size, type=int),
            show_qr=_flag(args.get("show_qr")),
            show_logo=_flag(args.get("show_logo")),
        )
        try:
            view = preview_badge(preview_type, theme, args.get("orientation", LANDSCAPE),
                                 logo_text=app.config["BADGE_LOGO_TEXT"])
        except ValueError:
            abort(404)
        return render_template("badge.html", view=view, print_url=None)

    # ---------------- Errors ----------------
    @app.errorhandler(EncodingError)
    def encoding_failed(e):
        return _error(str(e), 400)

    @app.errorhandler(AssemblyError)
    def assembly_failed(e):
        return _error("Document generation failed, please retry", 500)

    @app.errorhandler(PrintError)
    def print_failed(e):
        logger.error("Badge print failed: %s", e)
        return _error("Badge could not be printed", 500)

    return app


# ---------------- Run ----------------
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    create_app().run()
