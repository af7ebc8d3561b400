"""Identifier generators: CUID2 row ids and request ids."""

import uuid

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a CUID2 for laporan and app_user primary keys."""
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(f"cuid2 returned {type(result).__name__}, expected str")
    return result


def generate_request_id() -> str:
    return str(uuid.uuid4())
