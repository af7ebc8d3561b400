"""Cross-cutting helpers shared by every layer (logging, time, ids)."""
