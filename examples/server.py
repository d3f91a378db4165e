"""
=============================================================================
EXAMPLE: GREETING SERVER
=============================================================================

Three routes on one Router, tried in this order:

    /hello   ──►  "hello"
    /world   ──►  "world"
    /        ──►  JSON in, JSON out ({"name": ..., "age": ...})

Run it:

    python examples/server.py
    BASKET_PORT=3000 BASKET_LOG_LEVEL=DEBUG python examples/server.py

Then, from another shell:

    python -m basket get http://localhost:8080/hello
    python -m basket post http://localhost:8080/ --json --data '{"name": "John", "age": 42}'
    python -m basket post http://localhost:8080/ --data "not json"

The server stops on the first malformed request or network error.
=============================================================================
"""

from basket import BasketError, Response, Router, ServerConfig, serve


def hello(state, request):
    return 200, "hello"


def world(state, request):
    return 200, "world"


def index(state, request):
    try:
        person = request.json()
        name, age = person["name"], int(person["age"])
    except (BasketError, KeyError, TypeError, ValueError):
        return Response.builder().status(400).body("invalid json").build()

    return Response.builder().json({"name": name, "age": age}).build()


def main():
    router = (
        Router()
        .route("/hello", hello)
        .route("/world", world)
        .route("/", index)
    )
    serve(router, ServerConfig.from_env())


if __name__ == "__main__":
    main()
