"""
Permission management feature module.

Permission sets over system, user, connection and connection group
permissions, staging of add/remove diffs, and the checks deciding who may
edit which account.
"""
