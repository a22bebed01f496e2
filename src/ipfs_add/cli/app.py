# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import json
import logging
from typing import List

import requests
import typer

from ..adapters.filesystem.local_fs import LocalFS
from ..adapters.gateway.http_gateway import HttpGateway
from ..config import DEFAULT_NODE, NODE_ENV, Config
from ..domain import AddResult, IpfsAddError
from ..ports.gateway import GatewayPort
from ..services import PathAdder

from ..logging_config import setup_logging

setup_logging()

app = typer.Typer(
    help="ipfs-add - Add files and directories to IPFS as a Merkle DAG",
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)

# Failures reported as "error: ..." instead of a traceback.
REPORTED_ERRORS = (IpfsAddError, requests.RequestException, OSError, ValueError)

NODE_OPTION = typer.Option(
    DEFAULT_NODE, "--node", envvar=NODE_ENV, help="The url of IPFS node to use."
)


class EchoListener:
    """Prints one `added <hash> <name>` line per stored node."""

    def added(self, name: str, result: AddResult) -> None:
        typer.echo(f"added {result.hash} {name}")


def make_gateway(node: str) -> GatewayPort:
    return HttpGateway(node)


def _wire(config: Config, gateway: GatewayPort) -> PathAdder:
    """
    Minimal composition root:
      LocalFS + gateway + EchoListener
    """
    return PathAdder(
        gateway,
        LocalFS(),
        handle_hidden_files=config.handle_hidden_files,
        listener=EchoListener(),
    )


def _fail(e: Exception) -> None:
    logger.debug("command failed", exc_info=e)
    typer.echo(f"error: {e}", err=True)
    raise typer.Exit(code=1)


def _verbose(verbose: bool) -> None:
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Verbose logging enabled")


@app.command()
def add(
    paths: List[str] = typer.Argument(
        ..., help="The path to a file or directory to be added to IPFS."
    ),
    node: str = NODE_OPTION,
    hidden: bool = typer.Option(
        False,
        "-H",
        "--hidden",
        help="Include files that are hidden. Only takes effect on directory add.",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
):
    """
    Add the contents of each PATH to IPFS. Directories are added recursively
    to form the IPFS Merkle DAG.
    """
    _verbose(verbose)
    config = Config(node=node, paths=list(paths), handle_hidden_files=hidden)
    with make_gateway(config.node) as gateway:
        adder = _wire(config, gateway)
        for path in config.paths:
            try:
                adder.add_path(path)
            except REPORTED_ERRORS as e:
                _fail(e)


@app.command()
def cat(
    path: str = typer.Argument(..., help="IPFS path of the content to print."),
    node: str = NODE_OPTION,
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
):
    """
    Write the content stored at PATH to standard output.
    """
    _verbose(verbose)
    out = typer.get_binary_stream("stdout")
    try:
        with make_gateway(node) as gateway, gateway.cat(path) as content:
            for chunk in content:
                out.write(chunk)
        out.flush()
    except REPORTED_ERRORS as e:
        _fail(e)


@app.command()
def stat(
    path: str = typer.Argument(..., help="IPFS path of the node to inspect."),
    node: str = NODE_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Print the stat as JSON."),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
):
    """
    Print statistics about the DAG node at PATH.
    """
    _verbose(verbose)
    try:
        with make_gateway(node) as gateway:
            st = gateway.object_stat(path)
    except REPORTED_ERRORS as e:
        _fail(e)
        return

    fields = {
        "Hash": st.hash,
        "NumLinks": st.num_links,
        "BlockSize": st.block_size,
        "LinksSize": st.links_size,
        "DataSize": st.data_size,
        "CumulativeSize": st.cumulative_size,
    }
    if as_json:
        typer.echo(json.dumps(fields, indent=2))
        return
    for key, value in fields.items():
        typer.echo(f"{key}: {value}")
