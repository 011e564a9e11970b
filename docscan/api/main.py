from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from docscan import __version__
from docscan.api.routes import router
from docscan.config import settings

# Initialize FastAPI app
app = FastAPI(
    title="Enrollment Document Scan API",
    version=__version__,
    description="OCR and AI validation of student enrollment documents using Gemini, DSPy and LangGraph"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include router
app.include_router(router)

@app.get("/")
async def root():
    return {
        "message": "Enrollment Document Scan API",
        "version": __version__,
        "status": "running"
    }

@app.get("/health")
async def health():
    return {"status": "healthy"}

def run():
    import uvicorn
    uvicorn.run(
        "docscan.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_config=None  # Use our custom logging
    )

if __name__ == "__main__":
    run()
