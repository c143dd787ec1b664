"""Host-facing adapters: spell check engines, storage, locale enumeration."""
