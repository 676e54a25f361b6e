from __future__ import annotations

import zlib


def name_tag(name: str) -> str:
    """
    Short fingerprint of a player name.

    Telegram caps callback data at 64 bytes, so the name shown in a
    confirmation prompt travels as a CRC32 tag instead of verbatim.
    """

    return f"{zlib.crc32(name.encode('utf-8')):08x}"


def encode_remove_confirmation(player_id: int, player_name: str, accepted: bool) -> str:
    """
    Encode a remove-player confirmation/decline callback.

    Format:
      rm:yes:{player_id}:{name_tag}
      rm:no:{player_id}:{name_tag}
    """

    answer = "yes" if accepted else "no"
    return f"rm:{answer}:{player_id}:{name_tag(player_name)}"


def parse_remove_confirmation(data: str) -> tuple[bool, int, str]:
    parts = data.split(":")
    if len(parts) != 4 or parts[0] != "rm" or parts[1] not in ("yes", "no") or not parts[3]:
        raise ValueError(f"Invalid remove confirmation callback data: {data}")

    accepted = parts[1] == "yes"
    player_id = int(parts[2])
    return accepted, player_id, parts[3]


def encode_reset_confirmation(accepted: bool) -> str:
    """
    Encode a reset-all confirmation/decline callback.

    Format: reset:yes | reset:no
    """

    return "reset:yes" if accepted else "reset:no"


def parse_reset_confirmation(data: str) -> bool:
    parts = data.split(":")
    if len(parts) != 2 or parts[0] != "reset" or parts[1] not in ("yes", "no"):
        raise ValueError(f"Invalid reset confirmation callback data: {data}")

    return parts[1] == "yes"
