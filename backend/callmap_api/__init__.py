"""HTTP service exposing resolved built-in signatures."""
