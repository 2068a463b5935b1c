import uvicorn
from dotenv import load_dotenv

def main():
    """Main function to run the chat relay API"""
    load_dotenv()  # Load environment variables from .env file

    from chatrelay.config import settings

    uvicorn.run(
        "chatrelay.main:app",
        host=settings.host,
        port=settings.port,
        workers=1,    # Number of worker processes
        log_level=settings.log_level,
    )

if __name__ == "__main__":
    main()
