"""Metadata codec — decrypt and parse the game's per-save ``meta.txt``.

The file is base64 text of an AES-128-CBC ciphertext (PKCS#7 padded). The
game uses the same 16 ASCII bytes as both key and IV.
"""

from __future__ import annotations

import base64
import binascii
import json
from pathlib import Path
from typing import Any

from Crypto.Cipher import AES
from Crypto.Util.Padding import unpad

from nine_saves.errors import DecodeError
from nine_saves.models.save_info import SaveMetadata

METADATA_FILE = "meta.txt"

KEY = b"1234567812345678"
IV = KEY
BLOCK_SIZE = AES.block_size

# payload key → (SaveMetadata field, accepted JSON types)
_FIELDS: dict[str, tuple[str, tuple[type, ...]]] = {
    "level": ("level", (int,)),
    "playTime": ("playtime", (int, float)),
    "gold": ("gold", (int,)),
    "gameMode": ("gamemode", (int,)),
    "atSceneGuid": ("scene_id", (str,)),
}

# Upper bounds of the game's unsigned fields
_LIMITS = {
    "level": 0xFF,
    "gold": 0xFFFFFFFF,
    "gameMode": 0xFF,
}


def decrypt(raw: bytes) -> bytes:
    """Base64-decode and decrypt *raw*, returning the unpadded plaintext."""
    try:
        ciphertext = base64.b64decode(raw.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"malformed base64: {e}") from e

    if not ciphertext or len(ciphertext) % BLOCK_SIZE:
        raise DecodeError(
            f"ciphertext length {len(ciphertext)} is not a multiple of {BLOCK_SIZE}"
        )

    cipher = AES.new(KEY, AES.MODE_CBC, IV)
    try:
        return unpad(cipher.decrypt(ciphertext), BLOCK_SIZE, style="pkcs7")
    except ValueError as e:
        raise DecodeError(f"invalid padding: {e}") from e


def parse_payload(plaintext: bytes) -> SaveMetadata:
    """Map the decrypted JSON object onto SaveMetadata; unknown keys are ignored."""
    try:
        payload = json.loads(plaintext.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError(f"payload is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise DecodeError(f"payload is a {type(payload).__name__}, expected an object")

    values: dict[str, Any] = {}
    for key, (attr, types) in _FIELDS.items():
        if key not in payload:
            raise DecodeError(f"missing field '{key}'")
        value = payload[key]
        # bool is an int subclass; JSON true/false is never a valid number here
        if isinstance(value, bool) or not isinstance(value, types):
            raise DecodeError(f"field '{key}' has unexpected type {type(value).__name__}")
        if isinstance(value, (int, float)) and value < 0:
            raise DecodeError(f"field '{key}' is negative")
        limit = _LIMITS.get(key)
        if limit is not None and value > limit:
            raise DecodeError(f"field '{key}' out of range: {value}")
        values[attr] = float(value) if attr == "playtime" else value

    return SaveMetadata(**values)


def decode(raw: bytes) -> SaveMetadata:
    """Decode the contents of a metadata file. Raises DecodeError on any failure."""
    return parse_payload(decrypt(raw))


def read_metadata(save_dir: Path) -> SaveMetadata:
    """Read and decode ``meta.txt`` inside *save_dir*."""
    meta_path = save_dir / METADATA_FILE
    try:
        raw = meta_path.read_bytes()
    except FileNotFoundError as e:
        raise DecodeError("metadata file not found") from e
    except OSError as e:
        raise DecodeError(f"cannot read {meta_path.name}: {e}") from e
    return decode(raw)
