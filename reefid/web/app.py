import os
from pathlib import Path
import uvicorn
from fastapi.responses import HTMLResponse

from reefid.services.api import create_app

root = Path(__file__).resolve().parent

# Page routes live on the API app so its lifespan (camera + models) runs
app = create_app()
app.title = "reefid web"

@app.get("/", response_class=HTMLResponse)
def index():
    return (root / "templates" / "index.html").read_text(encoding="utf-8")


if __name__ == "__main__":
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
