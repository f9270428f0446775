from fastapi import FastAPI, Response
from fastapi.responses import JSONResponse

app = FastAPI()


@app.get("/ok")
async def ok() -> Response:
    return JSONResponse({"a": 1})


@app.get("/repo")
async def repo() -> Response:
    return JSONResponse({"name": "requestable", "stars": 3})


@app.get("/empty")
async def empty() -> Response:
    return Response(status_code=204)


@app.get("/binary")
async def binary() -> Response:
    return Response(b"\xff\xfe\xfa", media_type="application/octet-stream")


@app.get("/broken-json")
async def broken_json() -> Response:
    return Response("{not json", media_type="application/json")


@app.get("/missing")
async def missing() -> Response:
    return JSONResponse({"detail": "not here"}, status_code=404)
