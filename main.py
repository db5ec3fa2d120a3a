import os

import uvicorn

if __name__ == "__main__":
    # Serves the API; the Streamlit UI runs separately (streamlit run streamlit_app.py)
    uvicorn.run(
        "api.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=bool(os.getenv("RELOAD")),
    )
