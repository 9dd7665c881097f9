import uvicorn

from speech_relay.config import get_settings

def main() -> None:
    s = get_settings()
    uvicorn.run("speech_relay.main:app", host=s.HOST, port=s.PORT)

if __name__ == "__main__":
    main()
