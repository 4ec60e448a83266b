"""
Key and proof files.

Paths are always passed in explicitly; nothing here falls back to a default
location, so keys from different environments cannot be mixed up.
"""

import logging
import os
import shutil
from contextlib import contextmanager
from pathlib import Path

from zkmint.errors import KeyLoadError, SerializationError, SetupError
from zkmint.serializers import (
    deserialize_proof,
    deserialize_proving_key,
    deserialize_verifying_key,
    serialize_proof,
    serialize_proving_key,
    serialize_verifying_key,
)

logger = logging.getLogger(__name__)


@contextmanager
def exclusive_lock(target):
    """Hold ``<target>.lock`` for the duration of the block.

    A second writer racing on the same paths fails instead of interleaving.
    A lock left behind by a crashed writer has to be removed by hand.
    """
    lock_path = Path(str(target) + ".lock")
    try:
        fd = os.open(lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
    except FileExistsError as exc:
        raise SetupError(
            "{} is locked by another writer (delete {} if no setup is running)".format(
                target, lock_path)) from exc
    try:
        os.write(fd, str(os.getpid()).encode())
        os.close(fd)
        yield
    finally:
        lock_path.unlink()


def _sibling(path, suffix):
    return path.with_name(".{}.{}.{}".format(path.name, os.getpid(), suffix))


def _write_file(path, data):
    with open(path, "wb") as f:
        f.write(data)
        f.flush()
        os.fsync(f.fileno())


def _install_pair(pk_tmp, vk_tmp, pk_path, vk_path, backup):
    """Rename both temporaries into place; on failure the old proving key comes back."""
    had_old = pk_path.exists()
    if had_old:
        shutil.copyfile(pk_path, backup)
    os.replace(pk_tmp, pk_path)
    try:
        os.replace(vk_tmp, vk_path)
    except OSError:
        if had_old:
            os.replace(backup, pk_path)
        else:
            pk_path.unlink()
        raise


def write_key_pair(pk, vk, proving_key_path, verifying_key_path):
    """Write both keys; neither destination changes unless both writes succeed.

    Raises:
        SetupError: the paths coincide, another writer holds the lock, or a
            write or rename failed (the previous pair is left in place)
    """
    pk_path = Path(proving_key_path)
    vk_path = Path(verifying_key_path)
    if pk_path.resolve() == vk_path.resolve():
        raise SetupError("proving and verifying key paths must differ")

    pk_bytes = serialize_proving_key(pk)
    vk_bytes = serialize_verifying_key(vk)

    with exclusive_lock(pk_path):
        pk_tmp = _sibling(pk_path, "tmp")
        vk_tmp = _sibling(vk_path, "tmp")
        backup = _sibling(pk_path, "bak")
        try:
            _write_file(pk_tmp, pk_bytes)
            _write_file(vk_tmp, vk_bytes)
            _install_pair(pk_tmp, vk_tmp, pk_path, vk_path, backup)
        except OSError as exc:
            raise SetupError("could not write key pair: {}".format(exc)) from exc
        finally:
            for leftover in (pk_tmp, vk_tmp, backup):
                leftover.unlink(missing_ok=True)

    logger.info("proving key saved to %s (%d bytes)", pk_path, len(pk_bytes))
    logger.info("verifying key saved to %s (%d bytes)", vk_path, len(vk_bytes))


def _read_key_file(path, decode):
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise KeyLoadError("cannot read {}: {}".format(path, exc)) from exc
    try:
        return decode(data)
    except SerializationError as exc:
        raise KeyLoadError("{} is not a valid key file: {}".format(path, exc)) from exc


def load_proving_key(path):
    return _read_key_file(path, deserialize_proving_key)


def load_verifying_key(path):
    return _read_key_file(path, deserialize_verifying_key)


def write_proof(proof, path):
    path = Path(path)
    data = serialize_proof(proof)
    tmp = _sibling(path, "tmp")
    _write_file(tmp, data)
    os.replace(tmp, path)
    logger.info("proof saved to %s", path)
    return data


def load_proof(path):
    """Raises SerializationError for corrupt bytes and OSError for an unreadable file."""
    return deserialize_proof(Path(path).read_bytes())
