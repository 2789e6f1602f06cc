# main.py
"""
Local runner. In containers use: uvicorn classgroups.main:app
"""
import uvicorn

from classgroups.main import app

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
