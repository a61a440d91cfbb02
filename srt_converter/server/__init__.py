"""HTTP API server for the transcript-to-SRT converter."""
