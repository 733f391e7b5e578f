#!/usr/bin/env python3
"""
Production startup script for the Interview Prep AI backend on Render
"""

import uvicorn
from config import get_settings

if __name__ == "__main__":
    settings = get_settings()

    print("🚀 Starting Interview Prep AI Production Server...")
    print(f"📍 Server will be available on port: {settings.port}")
    print("🔧 Press Ctrl+C to stop the server")
    print("-" * 50)

    # Startup aborts (and the process exits) if GEMINI_API_KEY is missing
    uvicorn.run(
        "main:app",
        host="0.0.0.0",  # Bind to all interfaces for Render
        port=settings.port,
        reload=False,
        log_level="info"
    )
