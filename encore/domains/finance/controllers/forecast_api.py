"""Forecast generation and forecast settings/override API."""

from __future__ import annotations

import logging
from datetime import date

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity
from pydantic import ValidationError

from encore.core.auth.csrf import issue_csrf_token
from encore.core.utils.decorators import csrf_protected, require_admin
from encore.domains.finance.schemas.forecast_schemas import (
    ForecastOverrideCreate,
    ForecastOverrideQuery,
    ForecastOverrideResponse,
    ForecastParams,
    ForecastSettingResponse,
    ForecastSettingUpsert,
)
from encore.domains.finance.services.errors import DataAccessError
from encore.domains.finance.services.forecast_admin_service import (
    delete_override,
    delete_setting,
    list_overrides,
    list_settings,
    upsert_override,
    upsert_setting,
)
from encore.domains.finance.services.forecast_repository import SqlAlchemyForecastRepository
from encore.domains.finance.services.forecast_service import generate_forecast
from encore.extensions import db, limiter

logger = logging.getLogger(__name__)

forecast_api_bp = Blueprint("finance_forecast_api", __name__)


def _data_access_failed(exc: DataAccessError):
    logger.error("Forecast request aborted: %s", exc)
    return jsonify({"ok": False, "error": "data_access_error", "source": exc.source}), 500


@forecast_api_bp.route("/forecast", methods=["GET", "POST"])
@require_admin
@limiter.limit("30/minute")
def get_forecast():
    payload = request.get_json(silent=True) if request.method == "POST" else request.args.to_dict()
    try:
        params = ForecastParams.model_validate(payload or {})
    except ValidationError:
        return jsonify({"ok": False, "error": "validation_error"}), 400

    config = current_app.config
    months = params.months or config["FORECAST_DEFAULT_MONTHS"]
    if months > config["FORECAST_MAX_MONTHS"]:
        return jsonify({"ok": False, "error": "validation_error"}), 400

    repository = SqlAlchemyForecastRepository(db.session)
    try:
        result = generate_forecast(
            repository,
            as_of=date.today(),
            months=months,
            lookback_months=config["FORECAST_LOOKBACK_MONTHS"],
            baseline_months=config["FORECAST_BASELINE_MONTHS"],
        )
    except DataAccessError as exc:
        return _data_access_failed(exc)
    return jsonify({"ok": True, **result.to_dict()})


@forecast_api_bp.get("/forecast/csrf-token")
@require_admin
def get_csrf_token():
    return jsonify({"ok": True, "csrf_token": issue_csrf_token()})


@forecast_api_bp.get("/forecast/settings")
@require_admin
def get_settings():
    settings = [ForecastSettingResponse.model_validate(s).model_dump() for s in list_settings()]
    return jsonify({"ok": True, "settings": settings})


@forecast_api_bp.put("/forecast/settings/<string:category>")
@require_admin
@csrf_protected
def put_setting(category: str):
    payload = request.get_json(silent=True) or {}
    try:
        data = ForecastSettingUpsert.model_validate({**payload, "category": category})
    except ValidationError:
        return jsonify({"ok": False, "error": "validation_error"}), 400
    try:
        setting = upsert_setting(**data.model_dump())
    except DataAccessError as exc:
        return _data_access_failed(exc)
    return jsonify({"ok": True, "setting": ForecastSettingResponse.model_validate(setting).model_dump()})


@forecast_api_bp.delete("/forecast/settings/<string:category>")
@require_admin
@csrf_protected
def remove_setting(category: str):
    try:
        deleted = delete_setting(category)
    except DataAccessError as exc:
        return _data_access_failed(exc)
    if not deleted:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True})


@forecast_api_bp.get("/forecast/overrides")
@require_admin
def get_overrides():
    try:
        query = ForecastOverrideQuery.model_validate(request.args.to_dict())
    except ValidationError:
        return jsonify({"ok": False, "error": "validation_error"}), 400
    overrides = [
        ForecastOverrideResponse.model_validate(o).model_dump(mode="json") for o in list_overrides(query.month)
    ]
    return jsonify({"ok": True, "overrides": overrides})


@forecast_api_bp.post("/forecast/overrides")
@require_admin
@csrf_protected
def post_override():
    payload = request.get_json(silent=True) or {}
    try:
        data = ForecastOverrideCreate.model_validate(payload)
    except ValidationError:
        return jsonify({"ok": False, "error": "validation_error"}), 400
    try:
        override = upsert_override(created_by=int(get_jwt_identity()), **data.model_dump())
    except ValueError as exc:
        return jsonify({"ok": False, "error": "validation_error", "detail": str(exc)}), 400
    except DataAccessError as exc:
        return _data_access_failed(exc)
    return jsonify(
        {"ok": True, "override": ForecastOverrideResponse.model_validate(override).model_dump(mode="json")}
    )


@forecast_api_bp.delete("/forecast/overrides/<int:override_id>")
@require_admin
@csrf_protected
def remove_override(override_id: int):
    try:
        deleted = delete_override(override_id)
    except DataAccessError as exc:
        return _data_access_failed(exc)
    if not deleted:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True})
