"""Library for decoding rfc8536 TZif zone files."""
