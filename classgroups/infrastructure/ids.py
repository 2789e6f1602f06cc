# classgroups/infrastructure/ids.py
"""
Random identifiers for stored rows and admin tokens.
The alphabet leaves out look-alike characters (0, O, I, l, 1).
"""
import secrets

ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnpqrstuvwxyz23456789"
ID_LENGTH = 8
TOKEN_LENGTH = 32


def random_string(length: int) -> str:
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def generate_class_id() -> str:
    return random_string(ID_LENGTH)


def generate_member_id() -> str:
    return f"mbr_{random_string(ID_LENGTH)}"


def generate_group_id() -> str:
    return f"grp_{random_string(ID_LENGTH)}"


def generate_group_member_id() -> str:
    return f"gm_{random_string(ID_LENGTH)}"


def generate_admin_token() -> str:
    return random_string(TOKEN_LENGTH)
