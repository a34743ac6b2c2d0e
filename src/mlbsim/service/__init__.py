"""HTTP service exposing the simulator."""

from mlbsim.service.server import create_app, run_server

__all__ = ["create_app", "run_server"]
