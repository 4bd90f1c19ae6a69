"""Client for the Test Tracker RPC server."""
