import asyncio
import uvicorn

# (import path, port)
SERVICES = (
    ("auth_service.app.main:app", 8001),
    ("parking_service.app.main:app", 8002),
)


async def start_servers():
    servers = [
        uvicorn.Server(uvicorn.Config(app_path, host="0.0.0.0", port=port, reload=True))
        for app_path, port in SERVICES
    ]

    # Run both services in one event loop
    await asyncio.gather(*(server.serve() for server in servers))

if __name__ == "__main__":
    try:
        asyncio.run(start_servers())
    except KeyboardInterrupt:
        print("\nShutting down servers...")
