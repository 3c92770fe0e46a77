import os

import uvicorn

from meatmaster.core.database import init_db
from meatmaster.logger_config import logger

HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "8000"))

if __name__ == '__main__':
    init_db()
    logger.info(f"Server running at: http://{HOST}:{PORT}")
    uvicorn.run("meatmaster.main:app", host=HOST, port=PORT, reload=True)
