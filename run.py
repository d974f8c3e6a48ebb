import os

import uvicorn

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    # The Supabase client and rate limiter are per-process singletons;
    # scale with WEB_CONCURRENCY rather than threads.
    workers = int(os.environ.get("WEB_CONCURRENCY", 1))
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=port,
        workers=workers,
    )
