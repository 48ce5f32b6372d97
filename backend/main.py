from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
import logging
import uvicorn
from collab import CollaborationManager
from config import HOST, PORT, CORS_ORIGINS, OUTBOX_MAX_SIZE, LOG_LEVEL

# Create FastAPI app
app = FastAPI(
    title="Workspace Collaboration Backend",
    description="Real-time room server for shared coding workspaces",
    version="1.0.0"
)

# Add CORS middleware for frontend connections
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.state.collab_manager = CollaborationManager(outbox_size=OUTBOX_MAX_SIZE)


# Startup event
@app.on_event("startup")
async def startup_event():
    """Start the collaboration manager"""
    await app.state.collab_manager.start()
    print("🤝 Collaboration manager started")


@app.on_event("shutdown")
async def shutdown_event():
    """Disconnect remaining clients on server shutdown"""
    try:
        await app.state.collab_manager.stop()
        print("🤝 Collaboration manager stopped")
    except Exception as e:
        print(f"⚠️ Error stopping collaboration manager: {e}")


# WebSocket endpoint for collaborative workspaces
@app.websocket("/ws/collab")
async def collab_websocket_handler(websocket: WebSocket):
    """WebSocket endpoint for collaborative editing.

    Clients send join-room with the workspace room id, then cursor, code
    and file events which are relayed to the other members of the room.
    """
    await app.state.collab_manager.connect(websocket)


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    manager = app.state.collab_manager
    return {
        "status": "healthy" if manager.running else "starting",
        "service": "workspace-collab-backend",
        "connections": len(manager.registry),
        "rooms": len(manager.rooms),
    }


@app.get("/api/collab/rooms")
async def get_active_rooms():
    """Get all active rooms with their member counts"""
    return {"rooms": app.state.collab_manager.get_active_rooms()}


@app.get("/api/collab/rooms/{room_id:path}")
async def get_room_peers(room_id: str):
    """Get the members of one room (empty if the room is not active)"""
    return {"room": room_id, "peers": app.state.collab_manager.get_room_peers(room_id)}


# Root endpoint with API info
@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "message": "Workspace Collaboration Backend",
        "version": "1.0.0",
        "websocket_endpoint": "/ws/collab",
        "api_endpoints": {
            "health": "/health",
            "rooms": "/api/collab/rooms",
            "room_peers": "/api/collab/rooms/{room_id}"
        },
        "documentation": "/docs"
    }

if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    # Run the server
    uvicorn.run(
        "main:app",
        host=HOST,
        port=PORT,
        reload=True,
        log_level=LOG_LEVEL.lower()
    )
