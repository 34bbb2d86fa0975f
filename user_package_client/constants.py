"""Shared constants for the user package client."""

API_NAME = "[user-package]"

PACKAGE_NAME = "user_package"

# Routine call statements; bind names are part of the routine signatures.
CREATE_USER_SQL = "BEGIN :id := USER_PACKAGE.NEWUSERFUNC(:name); END;"
GET_USER_SQL = "BEGIN :user := USER_PACKAGE.GETUSER(:id); END;"
GET_ALL_USERS_SQL = "BEGIN :json := USER_PACKAGE.GETALLUSERS(); END;"
UPDATE_USER_SQL = "BEGIN :affected := USER_PACKAGE.UPDATEUSER(:id, :name); END;"
DELETE_USER_SQL = "BEGIN :affected := USER_PACKAGE.DELETEUSER(:id); END;"
