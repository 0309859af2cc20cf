import os

# Snapshot rendering is CPU bound; scale with processes, not request threads
workers = int(os.environ.get("WEB_CONCURRENCY", "2"))

bind = f"0.0.0.0:{os.environ.get('PORT', '8080')}"

# Logging
accesslog = "-"
errorlog = "-"
loglevel = "info"

# A generateHome request renders every snapshot before it returns
timeout = 300
