from typing import Annotated

from pydantic import BaseModel, Field
from rich.pretty import pprint

from modli import *


class AddOptions(BaseModel):
    """Adds a new user to the database"""
    name: Annotated[str, Aliases("n")] = Field(description="The name of the user")
    age: Annotated[int, Aliases("a")] = Field(ge=0, description="The age of the user (must be a number)")
    verbose: Annotated[bool | None, Aliases("v")] = Field(None, description="Enable verbose logging")


class RemoveOptions(BaseModel):
    """Removes a user from the database"""
    name: Annotated[str, Aliases("n")] = Field(description="The name of the user to remove (required)")
    age: Annotated[int | None, Aliases("a")] = Field(None, ge=0, description="The age of the user (must be a number)")


class ListOptions(BaseModel):
    """Lists all users in the database"""


cli = Cli("users")


@cli.command("add", AddOptions, "a")
def add(options):
    pprint(options)


@cli.command("remove", RemoveOptions, "rm")
def remove(options):
    pprint(options)


@cli.command("list", ListOptions, "ls")
def list_(options):
    print("Listing users")


if __name__ == '__main__':
    cli.parse()
