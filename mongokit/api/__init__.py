"""gRPC server integration."""
