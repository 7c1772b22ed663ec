"""
Team lunch map backend.

Responsibilities:
- Persist teams, users, restaurants and reviews in a single JSON document.
- Let team members register under a department code and log in.
- Add restaurants and reviews, and delete the ones you own.
- Summarize ratings per restaurant and per department for the map UI.
"""
