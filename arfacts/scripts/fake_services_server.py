"""
Fake vendor endpoints for running the pipeline without cloud credentials.

Simulates the three services on port 9100:
  POST /v1/images:annotate        (Google Vision)
  POST /api/v1/chat/completions   (OpenRouter)
  POST /v1/text:synthesize        (Google TTS)

Each endpoint sleeps briefly to mimic network latency. FAKE_VISION_MODE
controls the vision answer: object | label | empty | forbidden.

Usage:
    python -m arfacts.scripts.fake_services_server
    # then point the API at it:
    GOOGLE_API_KEY=x OPENROUTER_API_KEY=x AUDIO_PLAYER=null CAPTURE_ADAPTER=mock \
      VISION_URL=http://127.0.0.1:9100/v1/images:annotate \
      OPENROUTER_URL=http://127.0.0.1:9100/api/v1/chat/completions \
      TTS_URL=http://127.0.0.1:9100/v1/text:synthesize \
      python -m arfacts.services.api
"""
import asyncio
import base64
import os

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

app = FastAPI(title="fake-ar-services")

VISION_MODE = os.getenv("FAKE_VISION_MODE", "object")
LATENCY_S = float(os.getenv("FAKE_LATENCY_S", "0.4"))

# a few bytes standing in for MP3 data; players will refuse it, which exercises
# the silent speech-failure path
FAKE_AUDIO = b"ID3\x03\x00\x00\x00fake-mp3-frame"


@app.post("/v1/images:annotate")
async def annotate(request: Request):
    body = await request.json()
    features = [f["type"] for f in body["requests"][0]["features"]]
    print(f"[vision] mode={VISION_MODE} features={features}")
    await asyncio.sleep(LATENCY_S)
    if VISION_MODE == "forbidden":
        return JSONResponse(status_code=403, content={"error": {"code": 403, "message": "API key not valid"}})
    if VISION_MODE == "empty":
        return {"responses": [{}]}
    if VISION_MODE == "label":
        return {"responses": [{"labelAnnotations": [{"description": "Cat", "score": 0.93}]}]}
    return {
        "responses": [{
            "localizedObjectAnnotations": [{"name": "Coffee Mug", "score": 0.88}],
            "labelAnnotations": [{"description": "Drinkware", "score": 0.95}],
        }]
    }


@app.post("/api/v1/chat/completions")
async def chat(request: Request):
    body = await request.json()
    prompt = body["messages"][-1]["content"]
    label = prompt.split("'")[1] if "'" in prompt else "thing"
    print(f"[chat] model={body.get('model')} label={label}")
    await asyncio.sleep(LATENCY_S)
    return {
        "choices": [{
            "message": {
                "role": "assistant",
                "content": f"This is a {label}. It is used every day. It comes in many shapes.",
            },
            "finish_reason": "stop",
            "index": 0,
        }]
    }


@app.post("/v1/text:synthesize")
async def synthesize(request: Request):
    body = await request.json()
    print(f"[tts] voice={body['voice']['name']} chars={len(body['input']['text'])}")
    await asyncio.sleep(LATENCY_S)
    return {"audioContent": base64.b64encode(FAKE_AUDIO).decode("ascii")}


if __name__ == "__main__":
    print("Fake AR services starting on http://localhost:9100")
    uvicorn.run(app, host="0.0.0.0", port=9100)
