import fastapi
from . import auth, public, user

def include_routers(app: fastapi.FastAPI) -> fastapi.FastAPI:
    app.include_router(auth.router)
    app.include_router(public.router)
    app.include_router(user.router)
    return app
