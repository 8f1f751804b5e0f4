"""Application entry point for FastAPI server."""
import uvicorn

if __name__ == "__main__":
    print("\n" + "="*60)
    print("  Ask Docs API Service v1.0")
    print("="*60)
    print("\nEndpoints:")
    print("  POST /api/ask           - Ask a question (streaming SSE)")
    print("  POST /api/docs-get      - Resolve referenced records")
    print("  GET  /api/databases     - List databases with record counts")
    print("  GET  /health            - Health check")
    print("\nAPI Docs: http://localhost:8000/docs")
    print("\nUI: streamlit run ui/chat.py")
    print("="*60 + "\n")

    # Use import string format to enable reload mode
    uvicorn.run(
        "app.app:app",  # Import string instead of app object
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
