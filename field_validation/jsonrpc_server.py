#!/usr/bin/env python3
"""
Field validation over JSON-RPC 2.0.

One request per line on stdin, one response per line on stdout; logging
goes to stderr. Any process that can spawn a child and speak JSON can check
form data this way without importing Python.

    $ python -m field_validation.jsonrpc_server --debug
    {"jsonrpc":"2.0","id":1,"method":"validate_rules",
     "params":{"data":{"email":"x"},"rules":{"email":"required|email"}}}
    {"jsonrpc":"2.0","id":1,"result":{"passed":false,"errors":{...},"messages":[...]}}

A bad rule specification (unknown rule, missing argument, absent compared
field) is answered with code -32001 and the offending rule and attribute
under ``error.data``.
"""

import sys
import json
import signal
import logging
import argparse
import traceback
from typing import Any, Dict, Optional

from field_validation import ValidationService
from field_validation.errors import RuleConfigurationError

logger = logging.getLogger(__name__)


class JsonRpcError(Exception):
    """A request that is answered with an error object instead of a result."""

    def __init__(self, code: int, message: str, data: Optional[Any] = None):
        super().__init__(message)
        self.code = code
        self.data = data


class InvalidParamsError(ValueError):
    """Request parameters are missing or of the wrong type."""


class ValidationJsonRpcServer:
    """Serves ValidationService methods to line-oriented JSON-RPC clients."""

    ERROR_PARSE = -32700
    ERROR_INVALID_REQUEST = -32600
    ERROR_METHOD_NOT_FOUND = -32601
    ERROR_INVALID_PARAMS = -32602
    ERROR_INTERNAL = -32000
    ERROR_VALIDATION = -32001

    def __init__(self, config_path: Optional[str] = None):
        self.service = ValidationService(config_path)
        self.running = False
        self.methods = {
            'validate': self._validate,
            'validate_rules': self._validate_rules,
            'discover_rules': self._discover_rules,
            'discover_rulesets': lambda params: self.service.discover_rulesets(),
            'batch_validate': self._batch_validate,
            'reload_rulesets': self._reload_rulesets,
            'get_rulesets_age': lambda params: {"rulesets_age": self.service.get_rulesets_age()},
        }

    def start_server(self):
        """Answer requests from stdin until EOF, an interrupt or stop_server()."""
        self.running = True
        logger.debug("Listening on stdin")

        while self.running:
            try:
                line = sys.stdin.readline()
                if not line:
                    logger.debug("stdin closed")
                    break
                line = line.strip()
                if line:
                    logger.debug(f"<- {line}")
                    self._write(self.handle_request(line))
            except KeyboardInterrupt:
                break
            except Exception as e:
                logger.error(f"Server loop aborted: {e}")
                traceback.print_exc(file=sys.stderr)
                break

        self.running = False
        logger.debug("Server loop finished")

    def stop_server(self):
        """Ask the loop to finish after the current request."""
        self.running = False

    def handle_request(self, request_json: str) -> Dict[str, Any]:
        """
        Answer one raw request line.

        Never raises: every failure, including a bad rule specification,
        becomes a JSON-RPC error object carrying the request id when one
        could be read.
        """
        request_id = None
        try:
            request = self._parse(request_json)
            request_id = request.get("id")
            method, params = self._route(request)
            logger.debug(f"Calling {method}")
            return self._response(request_id, result=self.methods[method](params))
        except JsonRpcError as e:
            error = e
        except InvalidParamsError as e:
            error = JsonRpcError(self.ERROR_INVALID_PARAMS, str(e))
        except RuleConfigurationError as e:
            error = JsonRpcError(self.ERROR_VALIDATION, str(e),
                                 {"rule": e.rule, "attribute": e.attribute})
        except Exception as e:
            logger.debug(f"Request failed: {e}")
            error = JsonRpcError(self.ERROR_INTERNAL, f"Internal error: {e}")
        return self._response(request_id, error=error)

    def _parse(self, request_json: str) -> Dict[str, Any]:
        try:
            request = json.loads(request_json)
        except json.JSONDecodeError as e:
            raise JsonRpcError(self.ERROR_PARSE, f"Parse error: {e}") from e
        if not isinstance(request, dict):
            raise JsonRpcError(self.ERROR_INVALID_REQUEST, "Request must be a JSON object")
        if request.get("jsonrpc") != "2.0":
            raise JsonRpcError(self.ERROR_INVALID_REQUEST,
                               f"Expected jsonrpc '2.0', got {request.get('jsonrpc')!r}")
        return request

    def _route(self, request: Dict[str, Any]):
        method = request.get("method")
        params = request.get("params", {})
        if not method:
            raise JsonRpcError(self.ERROR_INVALID_REQUEST, "Request has no 'method'")
        if not isinstance(params, dict):
            raise InvalidParamsError(f"Params must be an object, got {type(params).__name__}")
        if method not in self.methods:
            raise JsonRpcError(self.ERROR_METHOD_NOT_FOUND, f"Method not found: {method}")
        return method, params

    @staticmethod
    def _require(params: Dict[str, Any], name: str, expected_type: type) -> Any:
        if name not in params:
            raise InvalidParamsError(f"Missing required parameter: {name}")
        value = params[name]
        if not isinstance(value, expected_type):
            raise InvalidParamsError(
                f"Parameter '{name}' must be {expected_type.__name__}, "
                f"got {type(value).__name__}"
            )
        return value

    def _validate(self, params):
        return self.service.validate(
            self._require(params, 'data', dict),
            self._require(params, 'ruleset_name', str),
        )

    def _validate_rules(self, params):
        return self.service.validate_rules(
            self._require(params, 'data', dict),
            self._require(params, 'rules', dict),
        )

    def _discover_rules(self, params):
        return self.service.discover_rules(self._require(params, 'ruleset_name', str))

    def _batch_validate(self, params):
        return self.service.batch_validate(
            self._require(params, 'records', list),
            self._require(params, 'id_fields', list),
            self._require(params, 'ruleset_name', str),
        )

    def _reload_rulesets(self, params):
        self.service.reload_rulesets()
        return {"status": "ok", "message": "Rulesets reloaded"}

    @staticmethod
    def _response(request_id: Any, result: Any = None,
                  error: Optional[JsonRpcError] = None) -> Dict[str, Any]:
        response = {"jsonrpc": "2.0", "id": request_id}
        if error is None:
            response["result"] = result
            return response
        response["error"] = {"code": error.code, "message": str(error)}
        if error.data is not None:
            response["error"]["data"] = error.data
        return response

    @staticmethod
    def _write(response: Dict[str, Any]):
        line = json.dumps(response)
        logger.debug(f"-> {line}")
        sys.stdout.write(line + "\n")
        sys.stdout.flush()


def main():
    """Run the server on this process's stdin/stdout."""
    parser = argparse.ArgumentParser(
        prog="python -m field_validation.jsonrpc_server",
        description="Validate form fields over JSON-RPC 2.0 (stdin/stdout).",
    )
    parser.add_argument('--debug', action='store_true',
                        help='log requests and responses to stderr')
    parser.add_argument('--config', default=None,
                        help='local config YAML (defaults to the bundled one)')
    args = parser.parse_args()

    # stdout carries protocol traffic
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    server = ValidationJsonRpcServer(config_path=args.config)
    logger.debug(f"Methods: {', '.join(server.methods)}")

    signal.signal(signal.SIGTERM, lambda sig, frame: server.stop_server())
    signal.signal(signal.SIGINT, lambda sig, frame: server.stop_server())

    server.start_server()


if __name__ == "__main__":
    main()
