"""
Gate Flask Blueprint: JSON endpoints for prove-and-gate
=========================================================

POST /gate/prove    {"secret": int}                    → gate result
POST /gate/verify   {"proof": hex, "commitment": hex}  → verdict
GET  /gate/runs                                        → audit trail
"""

from flask import Blueprint, current_app, jsonify, request

from zkmint.config import GateConfig, verifying_key_path
from zkmint.errors import ConfigError, KeyLoadError, SerializationError
from zkmint.field import to_fr
from zkmint.gate import GateStatus, MintGate
from zkmint.groth16.verifying import check_proof, prepare
from zkmint.ledger import TinyDBLedger
from zkmint.serializers import deserialize_commitment
from zkmint.storage import load_verifying_key

gate_bp = Blueprint('gate', __name__, url_prefix='/gate')

# DB is injected by app.py
DB = None

HTTP_STATUS = {
    GateStatus.ISSUED: 200,
    GateStatus.REJECTED: 422,
    GateStatus.LOW_BALANCE: 422,
    GateStatus.FAILED: 500,
}


def init_gate_bp(db):
    """Inject the TinyDB instance from app.py."""
    global DB
    DB = db


def get_db():
    if DB is None:
        raise ConfigError("DB_PATH is not configured (set ZKMINT_DB_PATH)")
    return DB


def make_gate():
    config = GateConfig.from_mapping(current_app.config)
    db = get_db()
    return MintGate(config, TinyDBLedger(db), db=db)


def bad_request(message):
    return jsonify({"status": "error", "error": message}), 400


def json_object():
    """The request body if it is a JSON object, else None."""
    body = request.get_json(silent=True)
    if body is None:
        return {}
    return body if isinstance(body, dict) else None


@gate_bp.errorhandler(ConfigError)
def config_error(exc):
    current_app.logger.error("configuration error: %s", exc)
    return jsonify({"status": "error", "error": str(exc)}), 500


@gate_bp.route("/prove", methods=["POST"])
def prove_and_gate():
    body = json_object()
    if body is None:
        return bad_request("request body must be a JSON object")
    try:
        secret = to_fr(body.get("secret"))
    except ValueError as exc:
        return bad_request("secret: {}".format(exc))

    result = make_gate().run(secret)
    current_app.logger.info("gate run finished: %s", result.status.value)
    return jsonify(result.to_dict()), HTTP_STATUS[result.status]


@gate_bp.route("/verify", methods=["POST"])
def verify_proof():
    body = json_object()
    if body is None:
        return bad_request("request body must be a JSON object")
    try:
        proof_bytes = bytes.fromhex(body.get("proof") or "")
        commitment = deserialize_commitment(bytes.fromhex(body.get("commitment") or ""))
    except (TypeError, ValueError, SerializationError) as exc:
        return bad_request("malformed request: {}".format(exc))

    try:
        vk = load_verifying_key(verifying_key_path(current_app.config))
    except KeyLoadError as exc:
        current_app.logger.error("%s", exc)
        return jsonify({"status": "error", "error": str(exc)}), 500

    verdict = check_proof(prepare(vk), proof_bytes, commitment)
    return jsonify({
        "status": verdict.status.value,
        "error": str(verdict.error) if verdict.error is not None else None,
    })


@gate_bp.route("/runs")
def runs():
    return jsonify(MintGate(None, None, db=get_db()).history())
