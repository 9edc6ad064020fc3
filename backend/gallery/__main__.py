# python -m gallery
import uvicorn

from gallery.core.config import settings

if __name__ == "__main__":
    uvicorn.run("gallery.main:app", host="0.0.0.0", port=settings.PORT)
