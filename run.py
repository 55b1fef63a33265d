"""
Serve the approvalflow API with uvicorn.

Usage:
    python run.py
    python run.py --reload               # auto-reload while developing
    python run.py --backend mongo        # store payloads and events in MongoDB
    python run.py --definitions ./flows  # load definitions from another directory
"""
import argparse
import os

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Run the approvalflow API server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    parser.add_argument(
        "--backend",
        choices=["memory", "mongo"],
        help="Persistence backend, overrides PERSISTENCE_BACKEND"
    )
    parser.add_argument("--definitions", help="Definitions directory, overrides DEFINITIONS_PATH")
    args = parser.parse_args()
    
    # Settings are read when the app module is imported, possibly in a reloader subprocess
    if args.backend:
        os.environ["PERSISTENCE_BACKEND"] = args.backend
    if args.definitions:
        os.environ["DEFINITIONS_PATH"] = args.definitions
    
    print(f"Starting approvalflow on http://{args.host}:{args.port}")
    uvicorn.run("approvalflow.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
