"""Family Olympics gallery media service."""
