"""Guest page markup. The page fetches its assignment client-side."""

GUEST_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Your Secret Santa Assignment</title>
</head>
<body>
  <main>
    <p id="loading">Loading your assignment...</p>

    <section id="error" hidden>
      <h2>Oops!</h2>
      <p id="errorMessage"></p>
      <button onclick="window.location.reload()">Try Again</button>
    </section>

    <section id="assignment" hidden>
      <h1>Hello, <span id="guestName"></span>!</h1>
      <p>You're buying a gift for:</p>
      <h2 id="recipient"></h2>
      <dl>
        <dt>Party</dt><dd id="partyName"></dd>
        <dt>Budget</dt><dd id="budget"></dd>
        <dt>Gift Ideas</dt><dd id="criteria"></dd>
      </dl>
      <p>Remember: keep it secret, keep it festive!</p>
    </section>
  </main>

  <script>
    const guestId = window.location.pathname.split('/')[2];

    function showError(message) {
      document.getElementById('loading').hidden = true;
      document.getElementById('error').hidden = false;
      document.getElementById('errorMessage').textContent = message;
    }

    async function loadAssignment() {
      try {
        const response = await fetch('/api/guest/' + guestId + '/assignment');
        if (response.status === 404) {
          showError('Invalid guest link.');
          return;
        }
        if (!response.ok) {
          showError('Failed to load assignment.');
          return;
        }
        const data = await response.json();
        document.getElementById('loading').hidden = true;
        document.getElementById('assignment').hidden = false;
        document.getElementById('guestName').textContent = data.guestName;
        document.getElementById('recipient').textContent = data.assignment;
        document.getElementById('partyName').textContent = data.party.name;
        document.getElementById('budget').textContent = data.party.budget || 'Not specified';
        document.getElementById('criteria').textContent = data.party.criteria || 'Surprise them!';
      } catch (error) {
        showError('Network error.');
      }
    }

    loadAssignment();
  </script>
</body>
</html>
"""
