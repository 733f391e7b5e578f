#!/usr/bin/env python3
"""
Development startup script for the Interview Prep AI backend
"""

import uvicorn
from config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    print("🚀 Starting Interview Prep AI Backend...")
    print(f"📍 Server will be available at: http://localhost:{settings.port}")
    print(f"📚 API documentation at: http://localhost:{settings.port}/docs")
    print("🔧 Press Ctrl+C to stop the server")
    print("-" * 50)

    uvicorn.run(
        "main:app",
        host="::",
        port=settings.port,
        reload=True,
        log_level="info"
    )
