"""User-facing message strings."""

ERROR_MARKER = "*Oh no!*"

# ── General ──────────────────────────────────────────────
CLEAR = "All previous commands have been cleared."
UNKNOWN_ERROR = "Something went wrong, please try again."
UNKNOWN_COMMAND = "Unknown command. Send /help for a list of commands."
SELECT_FROM_MENU = "\nPlease select from the menu below."

# ── Access control ───────────────────────────────────────
NOT_AUTHORIZED = "You are not authorized to use this bot. Authorize with `/auth [password]`."
ADMIN_ONLY = "Only the bot owner can use this command."
ALREADY_AUTHORIZED = "You are already authorized."
IS_REVOKED = "Your access to this bot has been revoked."
INVALID_PASSWORD = "Invalid password."
IS_AUTHORIZED = "You have been authorized, send /help for a list of commands."
USER_AUTHORIZED = " has been granted access to the bot."
YOUR_USER_ID = "Your user ID"
OWNER_CONFIG = "Set `BOT_OWNER` to this ID to become the bot owner."
OWNER_CLAIMED = "You are the first authorized user and are now the bot owner."
USER_NOT_FOUND = "That user could not be found in the access list."
OWNER_PROTECTED = "The owner's access cannot be revoked."

# ── Admin ────────────────────────────────────────────────
ALLOWED_USERS = "Allowed users"
REVOKED_USERS = "Revoked users"
NO_ALLOWED_USERS = "There are no allowed users."
NO_REVOKED_USERS = "There are no revoked users."
REVOKE_CONFIRM = "Are you sure you want to revoke access to"
UNREVOKE_CONFIRM = "Are you sure you want to restore access to"
ACCESS_REVOKED = "Access has been revoked for"
ACCESS_NOT_REVOKED = "Access was not revoked for"
ACCESS_UNREVOKED = "Access has been restored for"
ACCESS_NOT_UNREVOKED = "Access was not restored for"
USER_SELECTION_NOT_FOUND = "Could not find the user"

# ── Conversation flow ────────────────────────────────────
NO_STATE = "There is nothing in progress, start a new search with /q."
SEARCH_AGAIN = "Your search expired, please search again with /q."
TRY_AGAIN = "Your selection expired, please start again with /q."

# ── Movies ───────────────────────────────────────────────
MOVIES_LOOKUP = "What movie are you looking for?"
MOVIE_NOT_FOUND = "Could not find the movie"
MOVIE_EXISTS = "That movie is already in your library. Try searching again."
MOVIE_ADDED = "Movie added"
MOVIE_ADD_FAIL = "The movie could not be added."
MOVIES_WANTED = "Searching for all wanted movies."
NO_PROFILES = "No quality profiles are available."
FOUND_PROFILES = "Found profiles"
PROFILE_NOT_FOUND = "Could not find the profile"
LIBRARY_FOUND = "Found movies in library"
QUERY_NO_RESULTS = "No results for"
LIBRARY_EMPTY = "Your library is empty."
UPSTREAM_ERROR = "CouchPotato could not be reached."
