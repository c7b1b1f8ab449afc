from __future__ import annotations

from functools import wraps

from flask import Flask, jsonify, request

from ..common.validators import optional_int, parse_bool, require_positive_int
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.exceptions import NotFoundError, PersistenceError, ValidationError
from ..container import Container
from .model import SummaryFilter
from .serializers import (
    dump_errors,
    dump_legal,
    dump_owner_view,
    dump_page,
    parse_legal_request,
    parse_owner_type,
    parse_save_request,
)


def register(app: Flask, container: Container) -> None:
    service = container.holiday_service

    def json_errors(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except ValidationError as e:
                return jsonify({"message": str(e), "errors": dump_errors(e.errors)}), 400
            except NotFoundError as e:
                return jsonify({"message": str(e)}), 404
            except PersistenceError as e:
                return jsonify({"message": str(e)}), 500

        return wrapper

    def _body():
        payload = request.get_json(silent=True)
        if payload is None:
            raise ValidationError("요청 본문이 비어 있습니다.")
        return payload

    def _int_arg(name: str, default: int) -> int:
        value = request.args.get(name)
        if not value:
            return int(default)
        try:
            return int(value)
        except ValueError:
            raise ValidationError(f"{name} 값이 올바르지 않습니다.")

    @app.route("/api/v1/holidays", methods=["GET"], endpoint="holiday_list")
    @json_errors
    def holiday_list():
        args = request.args
        filters = SummaryFilter(
            year=require_positive_int(args.get("year"), "year"),
            head_office_id=optional_int(args.get("office"), "office"),
            franchise_id=optional_int(args.get("franchise"), "franchise"),
            store_id=optional_int(args.get("store"), "store"),
            page=_int_arg("page", 0),
            size=_int_arg("size", app.config.get("DEFAULT_PAGE_SIZE", DEFAULT_PAGE_SIZE)),
        )
        return jsonify({"data": dump_page(service.list_summary(filters))})

    @app.route("/api/v1/holidays/owner", methods=["GET"], endpoint="holiday_owner")
    @json_errors
    def holiday_owner():
        args = request.args
        view = service.resolve(
            year=require_positive_int(args.get("year"), "year"),
            org_id=optional_int(args.get("orgId"), "orgId"),
            store_id=optional_int(args.get("storeId"), "storeId"),
        )
        return jsonify({"data": dump_owner_view(view)})

    @app.route("/api/v1/holidays/<int:year>", methods=["POST"], endpoint="holiday_create")
    @json_errors
    def holiday_create(year: int):
        bundle = parse_save_request(_body(), year=year)
        ids = service.create(year=year, bundle=bundle)
        return jsonify({"data": ids}), 201

    @app.route("/api/v1/holidays", methods=["PUT"], endpoint="holiday_update")
    @json_errors
    def holiday_update():
        bundle = parse_save_request(_body())
        return jsonify({"data": service.update(bundle=bundle)})

    @app.route("/api/v1/holidays/<owner_type>/<int:holiday_id>", methods=["DELETE"], endpoint="holiday_delete")
    @json_errors
    def holiday_delete(owner_type: str, holiday_id: int):
        service.delete(owner_type=parse_owner_type(owner_type), holiday_id=holiday_id)
        return jsonify({"data": None})

    @app.route("/api/v1/holidays/legal/<int:year>", methods=["GET"], endpoint="legal_holiday_list")
    @json_errors
    def legal_holiday_list(year: int):
        return jsonify({"data": [dump_legal(r) for r in service.list_legal(year=year)]})

    @app.route("/api/v1/holidays/legal/<int:year>", methods=["POST"], endpoint="legal_holiday_create")
    @json_errors
    def legal_holiday_create(year: int):
        drafts = parse_legal_request(_body(), year=year)
        ids = service.create_legal(
            year=year,
            drafts=drafts,
            skip_duplicate=parse_bool(request.args.get("skipDuplicate")),
        )
        return jsonify({"data": ids}), 201

    @app.route("/api/v1/holidays/legal", methods=["PUT"], endpoint="legal_holiday_upsert")
    @json_errors
    def legal_holiday_upsert():
        return jsonify({"data": service.upsert_legal(drafts=parse_legal_request(_body()))})

    @app.route("/api/v1/holidays/legal/<int:holiday_id>", methods=["DELETE"], endpoint="legal_holiday_delete")
    @json_errors
    def legal_holiday_delete(holiday_id: int):
        service.delete_legal(holiday_id=holiday_id)
        return jsonify({"data": None})
