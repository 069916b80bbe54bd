"""Chat resolution, permission gating and the chat broadcast pipeline."""
