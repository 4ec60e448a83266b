"""
zkmint Flask application and command line
==========================================

    zkmint setup --proving-key keys/proving_key.bin --verifying-key keys/verifying_key.bin
    zkmint prove-and-gate 12345
    zkmint transfer <token_id> <recipient>
    zkmint deposit 2

Configuration is read from ``ZKMINT_*`` environment variables
(ZKMINT_PROVING_KEY, ZKMINT_VERIFYING_KEY, ZKMINT_PROOF_PATH, ZKMINT_DB_PATH,
ZKMINT_MIN_BALANCE, ZKMINT_METADATA_URI). Key locations are never defaulted.
"""

import logging

import click
from flask import Flask, current_app
from flask.cli import FlaskGroup, with_appcontext

from gate_routes import gate_bp, init_gate_bp, get_db
from zkmint.config import GateConfig, KeyPaths
from zkmint.errors import ConfigError, ZkMintError
from zkmint.field import CURVE_ORDER, to_fr
from zkmint.gate import GateStatus, MintGate
from zkmint.groth16.setup import setup
from zkmint.ledger import TinyDBLedger, open_db
from zkmint.serializers import bytes_short, fr_short
from zkmint.storage import write_key_pair


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_prefixed_env("ZKMINT")
    if test_config is not None:
        app.config.from_mapping(test_config)

    if not app.config.get("TESTING"):
        logging.basicConfig(
            level=app.config.get("LOG_LEVEL", "INFO"),
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )

    db_path = app.config.get("DB_PATH")
    init_gate_bp(open_db(db_path) if db_path else None)
    app.register_blueprint(gate_bp)

    app.cli.add_command(setup_command)
    app.cli.add_command(prove_and_gate_command)
    app.cli.add_command(transfer_command)
    app.cli.add_command(deposit_command)
    return app


class FieldElement(click.ParamType):
    name = "field_element"

    def convert(self, value, param, ctx):
        try:
            return to_fr(int(value))
        except ValueError:
            self.fail("{!r} is not an integer in [0, {})".format(value, CURVE_ORDER), param, ctx)


def _ledger():
    try:
        return TinyDBLedger(get_db())
    except ConfigError as exc:
        raise click.ClickException(str(exc))


@click.command("setup")
@click.option("--proving-key", type=click.Path(dir_okay=False), help="Where to write the proving key.")
@click.option("--verifying-key", type=click.Path(dir_okay=False), help="Where to write the verifying key.")
@with_appcontext
def setup_command(proving_key, verifying_key):
    """Generate the Groth16 key pair for the commitment circuit."""
    try:
        paths = KeyPaths.from_mapping(current_app.config, proving_key, verifying_key)
        click.echo("Setting up ZK parameters...")
        pk, vk = setup()
        write_key_pair(pk, vk, paths.proving_key, paths.verifying_key)
    except ZkMintError as exc:
        raise click.ClickException("setup failed: {}".format(exc))

    click.echo("Keys generated:")
    click.echo("  - {}".format(paths.proving_key))
    click.echo("  - {}".format(paths.verifying_key))


@click.command("prove-and-gate")
@click.argument("secret", type=FieldElement())
@with_appcontext
def prove_and_gate_command(secret):
    """Prove knowledge of SECRET and issue a token if the proof verifies."""
    try:
        config = GateConfig.from_mapping(current_app.config)
        db = get_db()
    except ConfigError as exc:
        raise click.ClickException(str(exc))
    gate = MintGate(config, TinyDBLedger(db), db=db)

    click.echo("Generating and verifying ZK proof...")
    result = gate.run(secret)
    if result.commitment is not None:
        click.echo("Commitment: {}".format(fr_short(result.commitment)))

    if result.status is GateStatus.REJECTED:
        raise click.ClickException("invalid proof, no token issued")
    if result.status is GateStatus.LOW_BALANCE:
        raise click.ClickException(
            "balance {} is below {}, run `zkmint deposit`".format(result.balance, config.min_balance))
    if result.status is GateStatus.FAILED:
        raise click.ClickException("gate failed: {}".format(result.error))

    click.echo("Proof {} verified and saved to {}".format(bytes_short(result.proof_bytes), config.proof_path))
    click.echo("Balance: {}".format(result.balance))
    click.echo("Token issued: {}".format(result.token_id))


@click.command("transfer")
@click.argument("token_id")
@click.argument("recipient")
@with_appcontext
def transfer_command(token_id, recipient):
    """Transfer TOKEN_ID to RECIPIENT."""
    if not _ledger().transfer_token(token_id, recipient):
        raise click.ClickException("transfer of {} failed".format(token_id))
    click.echo("Transferred {} to {}".format(token_id, recipient))


@click.command("deposit")
@click.argument("amount", type=float)
@with_appcontext
def deposit_command(amount):
    """Fund the local ledger account."""
    try:
        balance = _ledger().deposit(amount)
    except ZkMintError as exc:
        raise click.ClickException(str(exc))
    click.echo("Balance: {}".format(balance))


cli = FlaskGroup(create_app=create_app, help="Zero-knowledge commitment proofs gating token issuance.")


if __name__ == "__main__":
    cli()
