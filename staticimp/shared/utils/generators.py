"""ID generators for entries (CUID2)."""

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_entry_id() -> str:
    """Generate a collision-resistant unique identifier for a new entry.

    Used for `{@id}` placeholders, so it also ends up in review branch names
    and file names; CUID2 output is lowercase alphanumeric and safe in both.

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result
